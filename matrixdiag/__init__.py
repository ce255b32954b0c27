"""Matrix Diagnoser — find the broken pin, diode or joint behind dead keys.

Stages, in order:

  topology   extract key geometry, matrix map and pin wiring from a
             ZMK config (build.yaml + devicetree files)
  diagnosis  attribute a set of non-responsive keys to rows, columns,
             charlieplex pins, shared ground, interrupt lines or
             single switches
"""
