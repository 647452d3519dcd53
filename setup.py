"""Build the osufile package."""
from setuptools import setup

setup()
