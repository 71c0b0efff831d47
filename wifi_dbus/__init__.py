from .wifiDbus import *
