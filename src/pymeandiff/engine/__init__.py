from .interactive import (
    HELP_TEXT as HELP_TEXT,
    HELP_TITLE as HELP_TITLE,
    FilterKey as FilterKey,
    InteractiveDifferenceOfMean as InteractiveDifferenceOfMean,
)
from .scheduler import RepaintScheduler as RepaintScheduler
from .state import RadiusState as RadiusState, Region as Region
