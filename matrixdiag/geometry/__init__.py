from .keys import (
    key_polygon,
    key_at,
    layout_bounds,
    key_outlines,
)
