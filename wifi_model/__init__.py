from .wifiTypes import *
from .wifiNetwork import *
