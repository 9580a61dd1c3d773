from setuptools import setup, find_packages

setup(
    name="fieldvoice",
    version="0.1.0",
    description="Voice command pipeline for field data collection apps",
    author="",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"fieldvoice": ["data/*.yaml"]},
    install_requires=[
        "pyaudio>=0.2.11",
        "numpy>=1.21.0",
        "google-cloud-speech>=2.16.0",
        "google-auth>=2.10.0",
        "rich>=12.5.0",
        "click>=8.1.0",
        "pydantic>=2.0.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
        "aiohttp>=3.8.0",
        "rapidfuzz>=3.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "fieldvoice=fieldvoice.main:main",
        ],
    },
)
