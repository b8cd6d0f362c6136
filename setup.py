"""Install the open call submission and curation core package."""

from setuptools import setup, find_packages

setup(
    name='opencall-curation-core',
    version='0.1.0',
    package_dir={'': 'core'},
    packages=find_packages(where='core'),
    zip_safe=False,
    python_requires='>=3.8',
    install_requires=[
        'flask',
        'python-dateutil',
        'sqlalchemy>=2.0',
        'flask-sqlalchemy>=3.0',
        'retry',
        'pytz',
    ],
    extras_require={
        'test': ['pytest']
    },
    include_package_data=True
)
