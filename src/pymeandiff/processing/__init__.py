from .integral import (
    DoubleIntegralImage as DoubleIntegralImage,
    IntegralImage as IntegralImage,
    LongIntegralImage as LongIntegralImage,
    PixelModel as PixelModel,
    RGBIntegralImage as RGBIntegralImage,
    UnsupportedPixelModelError as UnsupportedPixelModelError,
    create_integral_image as create_integral_image,
    detect_pixel_model as detect_pixel_model,
)
from .difference_of_mean import (
    Radii as Radii,
    RadiusPair as RadiusPair,
    render_difference_of_mean as render_difference_of_mean,
)
