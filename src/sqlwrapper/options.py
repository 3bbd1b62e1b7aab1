from dataclasses import dataclass

from sqlwrapper.strategy import get_available_dialects, get_strategy_class

from libb import ConfigOptions

__all__ = ['DatabaseOptions']


@dataclass
class DatabaseOptions(ConfigOptions):
    """Options

    supported driver names: `postgresql`, `mysql`

    `timeout` is the connect timeout in seconds (0 leaves the driver default).
    """
    drivername: str = 'postgresql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0

    def __post_init__(self):
        try:
            strategy_cls = get_strategy_class(self.drivername)
        except ValueError as err:
            available = get_available_dialects()
            raise ValueError(f'drivername must be one of: {available}') from err
        strategy_cls.validate_options(self)
