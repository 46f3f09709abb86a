from clothsim.config.base_config import Config, load_config
from clothsim.simulators.mass_spring import MassSpringCloth
