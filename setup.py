import pathlib

import setuptools

here = pathlib.Path(__file__).parent.resolve()

long_description = (here / "README.md").read_text(encoding="utf-8")

setuptools.setup(
    name="block-witness",
    version="0.1.0",
    description="Extract self-contained block witnesses from an Ethereum JSON-RPC node",
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    packages=setuptools.find_packages(
        include=[
            "witness_base_types*",
            "witness_rpc*",
            "block_witness*",
            "config*",
            "cli*",
        ]
    ),
    package_data={"block_witness": ["logger.cfg"]},
    install_requires=[
        "pydantic>=2.0,<3",
        "requests>=2.31",
        "tenacity>=8.2",
        "click>=8.1",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8",
        ],
    },
    entry_points={
        "console_scripts": [
            "extract-witness=cli.extract_witness:extract_witness",
        ],
    },
)
