from setuptools import setup, find_packages


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="tubenet",
    version="0.3.0",
    description="Routing graphs, flows and feasibility checks for specimen tube logistics.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"tubenet.schemas": ["*.json"]},
    python_requires=">=3.10",
    install_requires=[
        "networkx",
        "pyyaml",
        "jsonschema",
        "pandas",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["tubenet=tubenet.cli:main"]},
)
