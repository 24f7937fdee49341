class RascalError(Exception):

    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg


class InvalidParameter(RascalError):
    """
    Invalid input given by the caller. The object the operation was called
    on is left unmodified.

    """
    pass


class InternalError(RascalError):
    """
    Broken invariant, usually a contract violation by the code producing
    the data (a calculator or a sample builder). Not meant to be caught.

    """
    pass
