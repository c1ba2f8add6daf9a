class EnumMetaProperties(type):
    """
    Metaclass for the enum-like constant classes used throughout sp3analysis (SP3 revisions, timescales, strictness
    modes, availability classes). It:
     - intercepts attempts to set *class* attributes, and rejects them.
       - NOTE: In the class or abstract class using this, you should also define an __init__() which raises
         an exception, to prevent instantiation.
     - defines the class string representation as being *just* the class name, without any fluff.
     - lets a collection class be iterated / tested for membership, based on the members it lists in `_all`.
    """

    def __setattr__(cls, name: str, value) -> None:
        raise AttributeError(f"Attributes of {cls} act as constants. Do not modify them.")

    def __repr__(cls) -> str:
        return f"{cls.__name__}"

    def __iter__(cls):
        return iter(cls.__dict__.get("_all", ()))

    def __contains__(cls, item) -> bool:
        return item in cls.__dict__.get("_all", ())
