from setuptools import setup, find_packages

if __name__ =='__main__':
    setup(
        name='clothsim',
        version='1.0',
        description='Mass-spring cloth simulation on Taichi',
        author='Krushang Gabani',
        author_email='krushang@buffalo.edu',
        keywords='Physics Simulation',
        packages=find_packages(include=['clothsim', 'clothsim.*']),
        python_requires='>=3.8',
        install_requires = [
            "imageio",
            "numpy",
            "pyrender",
            "pyyaml",
            "taichi",
            "trimesh",
        ],
        extras_require={
            "test": ["pytest"],
        }

    )
