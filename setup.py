import os

import setuptools

ROOT_DIR = os.path.dirname(__file__)


setuptools.setup(
    name="logpuller",
    version="0.1.0",
    python_requires=">=3.10",
    description="Pull logs from managed log sources and archive them to S3.",  # noqa: E501
    long_description=open(
        os.path.join(ROOT_DIR, "README.md"), "r", encoding="utf-8"
    ).read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Intended Audience :: Developers",
        "Topic :: System :: Logging",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    packages=setuptools.find_packages(include=["logpuller", "logpuller.*"]),
    entry_points={"console_scripts": ["logpuller = logpuller.cli.main:main"]},
    install_requires=[
        "boto3",
        "dacite",
        "pyarrow",
        "pyyaml",
        "requests",
        "typer",
        "urllib3",
    ],
    extras_require={
        "dev": [
            "moto>=5",
            "pytest",
            "pytest-cov",
            "pytest-timeout",
            "ruff",
            "black",
            "setuptools",
            "wheel",
        ]
    },
)
