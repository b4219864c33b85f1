
from setuptools import setup, find_packages

setup(
    name="panmarker",
    version="0.1.0",
    author="Zi-Hao Huang",
    author_email="zh384@cam.ac.uk",
    description="A package for population-agnostic SNP marker selection",
    long_description="Select SNP alleles that sit at a similarly moderate frequency in every population of a reference panel, per chromosome",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
    'click>=8.1',
    'numpy>=1.24.4',
    'pandas>=2.0.3',
    'pyyaml>=6.0',
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "panmarker=panmarker.cli.main:cli",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: CC BY-NC 4.0",
        "Operating System :: OS Independent",
    ],
    license="Creative Commons Attribution-NonCommercial 4.0",
    url="https://github.com/YCWangLab/panmarker",
    )
