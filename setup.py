from pathlib import Path

from setuptools import find_packages, setup

ROOT = Path(__file__).parent
README = (ROOT / "README.md").read_text(encoding="utf-8") if (ROOT / "README.md").exists() else ""

setup(
    name="pyopticsof",
    version="0.1.0",
    description="OPTICS-OF density-based local outlier scoring with pluggable neighbor backends",
    long_description=README,
    long_description_content_type="text/markdown",
    author="pyopticsof Contributors",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.19",
        "scipy>=1.5.1",
        "scikit-learn>=0.22.0",
        "joblib>=1.0.0",
    ],
    extras_require={
        "faiss": [
            "faiss-cpu>=1.7.4",
        ],
        "yaml": [
            "PyYAML>=5.1",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "pytest-xdist>=3.0.0",
            "black>=23.0.0",
            "isort>=5.12.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
        "all": [
            "pyopticsof[faiss,yaml,dev]",
        ],
    },
    include_package_data=True,
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Information Analysis",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    keywords=[
        "outlier-detection",
        "anomaly-detection",
        "optics",
        "local-outlier-factor",
        "density-based",
        "nearest-neighbors",
    ],
    entry_points={
        "console_scripts": [
            "pyopticsof-score=pyopticsof.cli:main",
        ],
    },
)
