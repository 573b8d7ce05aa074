from setuptools import setup, find_packages

setup(
    name="repobackup",
    version="0.1.0",
    description="repobackup archives files and directories into tar.gz bundles and pushes them to a git repository - on demand or on a daily, weekly or monthly schedule.",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=["pyyaml",
                      "tenacity",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "repobackup=repobackup.main:main",
        ],
    },
    python_requires=">=3.9",
)
