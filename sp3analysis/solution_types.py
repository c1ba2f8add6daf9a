from .enum_meta_properties import EnumMetaProperties


# Abstract base class for orbit product availability classes (latency / accuracy tier of a solution).
# The metaclass prevents its (effectively) constants from being modified.
class SolutionType(metaclass=EnumMetaProperties):
    name: str
    long_name: str

    def __init__(self):
        raise Exception("This is intended to act akin to an enum. Don't instantiate it.")


class FIN(SolutionType):
    """
    Final products, the most accurate, released around two weeks after the data span
    """

    name = "FIN"
    long_name = "final"


class RAP(SolutionType):
    """
    Rapid products, released the following day
    """

    name = "RAP"
    long_name = "rapid"


class ULT(SolutionType):
    """
    Ultra-rapid products, issued every 6 hours with half of the 48 hour span predicted
    """

    name = "ULT"
    long_name = "ultra-rapid"


class PRD(SolutionType):
    """
    Predicted products
    """

    name = "PRD"
    long_name = "predicted"


class UNK(SolutionType):
    """
    Internal representation of an unknown solution type.
    """

    name = "UNK"
    long_name = "unknown solution type"


class SolutionTypes(metaclass=EnumMetaProperties):
    """
    Availability classes of orbit products, as used in the IGS long product filename convention v2:
    https://files.igs.org/pub/resource/guidelines/Guidelines_For_Long_Product_Filenames_in_the_IGS_v2.0.pdf
    """

    def __init__(self):
        raise Exception("This is intended to act akin to an enum. Don't instantiate it.")

    FIN = FIN
    RAP = RAP
    ULT = ULT
    PRD = PRD
    UNK = UNK

    _all: list[type[SolutionType]] = [FIN, RAP, ULT, PRD, UNK]

    @staticmethod
    def from_name(name: str) -> type[SolutionType]:
        """
        Returns the relevant static SolutionType object, given the solution type's short name (case insensitive).
        :param str name: The short name of the solution type e.g. 'RAP', 'ULT', 'FIN', 'PRD'. Though not part of the
         official standard, 'UNK' can also be used to indicate an unknown solution type.
        :raises ValueError: if the name is empty, longer than 3 characters, or not a known solution type
        """
        if name is None or len(name.strip()) == 0:
            raise ValueError("Solution type name passed was None or effectively empty!", name)
        if len(name) > 3:
            raise ValueError("Long solution type names are not supported here. Please use RAP, ULT, etc.", name)
        name = name.upper()
        for solution_type in SolutionTypes._all:
            if name == solution_type.name:
                return solution_type
        raise ValueError(f"No known solution type with short name '{name}'")
