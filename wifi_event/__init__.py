from .appEvent import *
from .eventChannel import *
