class UnknownCallable(LookupError):
    """Raised by an implementation source when it cannot resolve the
    requested callable into a set of implementations at all. Note that
    this is **not** raised when the callable is known, but simply has
    no implementations matching a query; that case is represented by an
    empty result.
    """
