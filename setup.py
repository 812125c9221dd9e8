from setuptools import setup

setup(
    name="mathdoku",
    version="1.0.0",
    description="Generate arithmetic-caged Latin square puzzles and grade them by constraint propagation",
    zip_safe=False,
    python_requires='>=3.11',
    packages=['mathdoku'],
    install_requires=[
        "python-dotenv",
        "reportlab",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "mathdoku = mathdoku.cli:main",
        ],
    },
)
