#!/usr/bin/env python

from setuptools import setup

with open('README.md') as f:
    readme = f.read()

with open('moleff/core/_version.py') as f:
    exec(f.read())

setup(name='moleff',
      version=__version__,
      description='Energies, forces and virials of molecular force fields',
      long_description=readme,
      long_description_content_type="text/markdown",
      author='Daniele Coslovich',
      author_email='daniele.coslovich@umontpellier.fr',
      packages=['moleff', 'moleff/core', 'moleff/interaction', 'moleff/system'],
      install_requires=['numpy', 'scipy'],
      license='GPLv3',
      classifiers=[
          'License :: OSI Approved :: GNU General Public License v3 (GPLv3)',
          'Development Status :: 4 - Beta',
          'Intended Audience :: Science/Research',
          'Programming Language :: Python :: 3',
          'Programming Language :: Python :: 3.9',
          'Topic :: Scientific/Engineering :: Physics',
          'Topic :: Scientific/Engineering :: Chemistry',
      ]
)
