"""Setup script for the EPCIS normalizer package."""
from setuptools import setup, find_packages

setup(
    name="epcis-normalizer",
    version="1.0.0",
    description="Normalization and cross-linking of EPCIS 1.2/2.0 XML and JSON-LD documents",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"epcis_normalizer": ["schemas/*.xsd", "schemas/*.json"]},
    python_requires=">=3.10",
    install_requires=[
        "lxml>=4.9.0",
        "pydantic>=2.5.2",
        "pydantic-settings>=2.1.0",
        "jsonschema>=4.17.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.3",
            "pytest-asyncio>=0.21.1",
        ],
    },
    entry_points={
        "console_scripts": [
            "epcis-normalize=epcis_normalizer.main:main",
        ],
    },
)
