from setuptools import setup, find_packages


setup(
    name='voltransform',
    version='0.1a',
    packages=find_packages(exclude=['tests', 'tests.*']),
    license='MIT',
    description='Apply affine transforms to volumes and reslice them '
                'onto new voxel grids',
    python_requires='>=3.7',
    install_requires=['nibabel', 'numpy', 'scipy', 'tqdm'],
    extras_require={'test': ['pytest']},
    entry_points={
        'console_scripts': [
            'transform-tool=voltransform.transform.__main__:main',
        ],
    },
)
