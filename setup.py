from setuptools import setup, find_packages

setup(
    name="pr-collector",
    version="1.0.0",
    description="A tool to collect recent pull requests for a list of authors.",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests",
        "argcomplete",
        "XlsxWriter",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "pr-collector=pr_collector.main:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
)
