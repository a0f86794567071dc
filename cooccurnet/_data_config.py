# _data_config.py

from pathlib import Path

DATA_DIR = Path(__file__).resolve().parent / "data"

# Built-in presence/absence matrices (items x samples, first column = item labels)
DATASETS = {
    "finches": "finches.csv",
}

SIGNIFICANCE_THRESHOLD = 0.05

NODE_COLOR = "#606482"
EDGE_LIGHT_COLOR = "#B0B2C1"
EDGE_DARK_COLOR = "#3C3F51"

DEFAULT_LAYOUT = "kamada-kawai"

LAYOUTS = (
    "kamada-kawai",
    "fruchterman-reingold",
    "circle",
    "shell",
    "spectral",
    "random",
)

def get_dataset_path(name):
    if name not in DATASETS:
        raise FileNotFoundError(
            f"Dataset '{name}' is not available. "
            f"Available datasets: {', '.join(sorted(DATASETS.keys()))}"
        )
    return DATA_DIR / DATASETS[name]
