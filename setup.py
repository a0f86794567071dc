from setuptools import setup, find_packages
from os.path import dirname, join
import io

with open(join(dirname(__file__), 'README.md'), encoding='utf-8') as readme_file:
    readme = readme_file.read()

def get_version(relpath):
    """Read version info from a file without importing it."""
    for line in io.open(join(dirname(__file__), relpath), encoding="utf-8"):
        if line.startswith("__version__"):
            return line.split("=")[1].strip().strip("'\"")

setup(
    name='cooccurnet',
    version=get_version("cooccurnet/__init__.py"),
    description='Probabilistic species co-occurrence networks from presence/absence data',
    long_description=readme,
    long_description_content_type='text/markdown',
    url="https://github.com/bcoltman/cooccurnet",
    author='Ben Coltman',
    license='GPL3+',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Topic :: Scientific/Engineering',
        'Topic :: Scientific/Engineering :: Bio-Informatics',
        'License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)',
        'Programming Language :: Python :: 3',
    ],
    keywords="ecology co-occurrence network presence-absence",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={'cooccurnet': ['data/*.csv']},
    include_package_data=True,
    python_requires='>=3.9',
    install_requires=[
        'pandas>=1.0',
        'numpy>=1.15',
        'scipy>=1.0',
        'matplotlib>=3.0',
        'tqdm>=4.0',
        'networkx>=2.5',
        'pyvis>=0.3.2',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'cooccurnet = cooccurnet.__main__:main'
        ]
    },
)
