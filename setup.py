from setuptools import find_packages, setup

setup(
    name="harvest-hours",
    version="1.0.0",
    description="CLI to fetch billable hours from Harvest for the current day, week or month",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    python_requires=">=3.9",
    install_requires=[
        "requests",
        "python-dateutil",
        "python-dotenv",
        "dateparser",
        "keyring",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'harvest-hours=harvest_hours.cli:main'
        ]
    }
)
