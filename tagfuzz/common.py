class OutOfDataError(Exception):
    pass


class OutOfBoundsError(Exception):
    pass


class ConfigurationError(Exception):
    pass
