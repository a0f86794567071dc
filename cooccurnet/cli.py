#!/usr/bin/env python3
import argparse

from cooccurnet._data_config import (
    DATASETS,
    SIGNIFICANCE_THRESHOLD,
    DEFAULT_LAYOUT,
    LAYOUTS,
)


def positive_int(value):
    try:
        ivalue = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value} is not an integer")

    if ivalue <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive integer")
    return ivalue

def validate_probability(value):
    try:
        value = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value} is not a valid float.")

    if value < 0.0 or value > 1.0:
        raise argparse.ArgumentTypeError("Threshold must be between 0 and 1.")
    return value

def _format_tag(tag):
    return f"{tag}_" if tag else ""

def _add_input_arguments(req, opt):
    req.add_argument(
        "--input",
        required=True,
        help=(
            "Presence/absence table (CSV or TSV, items as rows, samples as columns) "
            f"or the name of a built-in dataset ({', '.join(sorted(DATASETS))})."
        ),
    )
    req.add_argument(
        "--output_dir",
        required=True,
        help="Directory where output files will be saved.",
    )
    opt.add_argument(
        "--tag",
        default="",
        help="Optional tag to prepend to output filenames for distinction.",
    )
    opt.add_argument(
        "--binarize",
        action="store_true",
        help="Treat the input as abundances and convert any value > 0 to presence.",
    )

def _add_cooccurrence_arguments(opt):
    opt.add_argument(
        "--threshold",
        type=validate_probability,
        default=SIGNIFICANCE_THRESHOLD,
        help="Significance threshold applied to p_lt and p_gt (default: %(default)s).",
    )
    opt.add_argument(
        "--prob",
        choices=["hyper", "comb"],
        default="hyper",
        help="Probability calculation: hypergeometric or combinatorial (default: %(default)s).",
    )
    opt.add_argument(
        "--no_thresh",
        dest="thresh",
        action="store_false",
        help="Keep pairs expected to co-occur in fewer than one sample.",
    )

def parse_cli(argv=None):
    parser = argparse.ArgumentParser(
        description="Probabilistic co-occurrence networks from presence/absence data"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ----------------------------
    # NETWORK SUBCOMMAND
    # ----------------------------
    network_sub = subparsers.add_parser(
        "network", help="Run the full workflow: co-occurrence, node/edge tables and interactive network."
    )

    req = network_sub.add_argument_group("required arguments")
    opt = network_sub.add_argument_group("optional arguments")
    _add_input_arguments(req, opt)
    _add_cooccurrence_arguments(opt)
    opt.add_argument(
        "--layout",
        choices=LAYOUTS,
        default=DEFAULT_LAYOUT,
        help="Network layout algorithm (default: %(default)s).",
    )
    opt.add_argument(
        "--min_sample_count",
        type=positive_int,
        help="Minimum number of samples in which an item must be present.",
    )
    opt.add_argument(
        "--min_item_count",
        type=positive_int,
        help="Minimum number of items a sample must hold to be included.",
    )

    def network_command(args):
        from cooccurnet.pipelines import run_network

        args.tag = _format_tag(args.tag)
        run_network(args)

    network_sub.set_defaults(func=network_command)

    # ----------------------------
    # COOCCURRENCE SUBCOMMAND
    # ----------------------------
    cooc_sub = subparsers.add_parser(
        "cooccurrence", help="Calculate pairwise co-occurrence probabilities."
    )

    req = cooc_sub.add_argument_group("required arguments")
    opt = cooc_sub.add_argument_group("optional arguments")
    _add_input_arguments(req, opt)
    _add_cooccurrence_arguments(opt)
    opt.add_argument(
        "--true_rand_classifier",
        type=validate_probability,
        default=0.1,
        help=(
            "Pairs whose observed co-occurrence lies within this fraction of the number of "
            "samples from expectation are summarised as random (default: %(default)s)."
        ),
    )

    def cooccurrence_command(args):
        from cooccurnet.analysis import cooccurrence

        cooccurrence(
            source=args.input,
            output_dir=args.output_dir,
            tag=_format_tag(args.tag),
            threshold=args.threshold,
            thresh=args.thresh,
            prob=args.prob,
            binarize=args.binarize,
            true_rand_classifier=args.true_rand_classifier,
        )

    cooc_sub.set_defaults(func=cooccurrence_command)

    # ----------------------------
    # FILTER SUBCOMMAND
    # ----------------------------
    filter_sub = subparsers.add_parser("filter", help="Filter rare items or sparse samples.")

    req = filter_sub.add_argument_group("required arguments")
    opt = filter_sub.add_argument_group("optional arguments")
    _add_input_arguments(req, opt)
    opt.add_argument(
        "--min_sample_count",
        type=positive_int,
        help="Minimum number of samples in which an item must be present.",
    )
    opt.add_argument(
        "--min_item_count",
        type=positive_int,
        help="Minimum number of items a sample must hold to be included.",
    )

    def filter_command(args):
        from cooccurnet.filter import filter_data

        if not any([args.min_sample_count, args.min_item_count]):
            filter_sub.error("At least one of the following arguments is required: --min_sample_count or --min_item_count")

        filter_data(
            source=args.input,
            output_dir=args.output_dir,
            min_sample_count=args.min_sample_count,
            min_item_count=args.min_item_count,
            tag=_format_tag(args.tag),
            binarize=args.binarize,
        )

    filter_sub.set_defaults(func=filter_command)

    # ----------------------------
    # PLOT SUBCOMMAND
    # ----------------------------
    plot_sub = subparsers.add_parser("plot", help="Plot a co-occurrence table.")

    req = plot_sub.add_argument_group("required arguments")
    req.add_argument(
        "--cooccurrence_file",
        required=True,
        help="Path to a cooccurrence.tsv file produced by 'cooccurrence' or 'network'.",
    )
    req.add_argument(
        "--output_dir",
        required=True,
        help="Directory where output files will be saved.",
    )

    opt = plot_sub.add_argument_group("optional arguments")
    opt.add_argument(
        "--tag",
        default="",
        help="Optional tag to prepend to output filenames for distinction.",
    )
    opt.add_argument(
        "--threshold",
        type=validate_probability,
        default=SIGNIFICANCE_THRESHOLD,
        help="Significance threshold used to colour pairs (default: %(default)s).",
    )

    def plot_command(args):
        from cooccurnet.plot import plot_cooccurrence

        plot_cooccurrence(
            cooccurrence_file=args.cooccurrence_file,
            output_dir=args.output_dir,
            tag=_format_tag(args.tag),
            threshold=args.threshold,
        )

    plot_sub.set_defaults(func=plot_command)

    # ----------------------------
    # DATASETS SUBCOMMAND
    # ----------------------------
    datasets_sub = subparsers.add_parser("datasets", help="List built-in datasets.")

    def datasets_command(args):
        from cooccurnet._data_config import get_dataset_path

        for name in sorted(DATASETS):
            print(f"{name}\t{get_dataset_path(name)}")

    datasets_sub.set_defaults(func=datasets_command)

    # --------------
    # Parse & Dispatch
    # --------------
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    parse_cli()
