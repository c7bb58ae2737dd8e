class Options:
    @classmethod
    def default(cls) -> "Options":
        """Returns the default options."""
        raise NotImplementedError("default not implemented")
