from .envelope import *
from .inspect import *
from .rsa import *
