from setuptools import setup, find_packages

setup(
    name='pathwalk',
    version='0.1.0',
    description='Read and write values deep inside nested object graphs with dot-paths.',
    packages=find_packages(include=['pathwalk', 'pathwalk.*']),
    include_package_data=True,
    install_requires=[
        'numpy',
        'pydantic>=2',
        'pyyaml',
        'click',
        'platformdirs',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        "console_scripts": [
            # 'pathwalk' command calls the main() group in pathwalk/cli.py
            "pathwalk = pathwalk.cli:main",
        ],
    },
    classifiers=[
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.10',
)
