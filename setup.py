from setuptools import setup, find_packages

if __name__ == "__main__":
    setup(
        name="lmseg",
        version="0.1.0",
        packages=find_packages(exclude=["tests", "tests.*"]),
        python_requires=">=3.8",
        install_requires=[
            "numpy",
            "scipy",
            "pandas",
            "pyyaml",
            "tifffile",
        ],
        extras_require={
            "test": ["pytest", "scikit-image"],
            "dev": ["flake8", "pytest", "mypy", "scikit-image"],
        },
        entry_points={
            'console_scripts': [
                'lmseg=lmseg.__main__:main',
            ],
        },
    )
