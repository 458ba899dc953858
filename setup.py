from setuptools import find_packages, setup
from pathlib import Path

this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="eyetrainer",
    version="0.1.0",
    description="Bouncing-target oculomotor and convergence trainer with a diplopia event log",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["eyetrainer", "eyetrainer.*"]),
    install_requires=[
        "zendriver",
        "Pillow",
    ],
    extras_require={
        "test": ["pytest", "pytest-asyncio"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
)
