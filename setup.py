from setuptools import setup, find_packages

setup(
    name="hpatuner",
    version="0.1.0",
    description="Kubernetes operator that widens HPA replica bounds when an error rate breaches its threshold",
    packages=find_packages(include=["hpatuner", "hpatuner.*"]),
    python_requires=">=3.9",
    install_requires=[
        "kopf==1.37.2",
        "kubernetes==31.0.0",
        "PyYAML==6.0.2",
        "python-dotenv==1.0.1",
        "requests==2.32.3",
        "urllib3>=1.26,<3",
    ],
    extras_require={
        "test": [
            "pytest==8.3.4",
        ],
    },
    entry_points={
        "console_scripts": [
            "hpatuner=hpatuner.__main__:main",
        ],
    },
)
