from setuptools import setup, find_packages

setup(
    name             = "deal-valuation-engine",
    version          = "1.0.0",
    description      = "Acquisition valuation, deal structuring and roll-up models",
    packages         = find_packages(exclude=["tests", "tests.*"]),
    py_modules       = ["main"],
    python_requires  = ">=3.9",
    install_requires = [
        "numpy>=1.24.0",
        "scipy>=1.10.0",
        "pandas>=2.0.0",
        "matplotlib>=3.7.0",
    ],
    extras_require   = {
        "test": ["pytest>=7.0"],
    },
    entry_points     = {
        "console_scripts": ["deal-valuation = main:main"]
    },
    classifiers      = [
        "Programming Language :: Python :: 3",
        "Topic :: Office/Business :: Financial",
        "Topic :: Scientific/Engineering :: Information Analysis",
    ],
)
