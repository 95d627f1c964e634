from .config import LoggingConfig as LoggingConfig
from .config import StreamType as StreamType
from .logger import Logger as Logger
from .models import Entry as Entry
from .models import Log as Log
from .models import LogLevel as LogLevel
from .models import LogLevelName as LogLevelName
