from .notificationBoard import *
from .wifiDevice import *
from .consoleView import *
from .commandConsole import *
from .consoleApp import *
