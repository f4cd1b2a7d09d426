from setuptools import setup, find_packages

setup(
    name="gemdiff",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests",
        "pyyaml",
        "textual",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "gemdiff=gemdiff.cli:main",
        ],
    },
    description="Apply AI-generated unified diffs to files whose contents have drifted.",
)
