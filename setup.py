"""Package setup for arcgis_gateway."""

from setuptools import setup, find_packages

setup(
    name="arcgis-gateway",
    version="1.0.0",
    description="Typed client for the ArcGIS Server REST API",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "urllib3>=2.0.0",
        "cryptography>=41.0.0",
    ],
    extras_require={
        "ui": [
            "tqdm>=4.66.0",
            "colorlog>=6.8.0",
        ],
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "arcgis-gateway=arcgis_gateway.cli:main",
        ],
    },
)
