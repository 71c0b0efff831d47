from .taskRunner import *
from .selectionState import *
from .networkCatalog import *
from .authCoordinator import *
from .credentialShare import *
from .stationSession import *
from .connectionOrchestrator import *
