DEFAULT_MAX_BINS = 64
DEFAULT_ALPHA = 0.999
DEFAULT_QUANTILES = "0.5,0.9,0.99"
DEFAULT_SNAPSHOT_EVERY = 1000

# str(h) renders a bin holding all of the weight as this many dots.
BAR_WIDTH = 200
