from setuptools import setup, find_packages


setup(
    name="sitecrate",
    version="0.1",
    packages=find_packages(include=["sitecrate", "sitecrate.*"]),
    description="Encrypted, portable bundles of site configuration files and per-site restore tooling.",
    author="vercingetorx",
    python_requires=">=3.8",
    install_requires=[
        "pycryptodomex>=3.23.0",
    ],
    entry_points={
        "console_scripts": [
            "sitecrate=sitecrate.cli:main",
        ]
    },
)
