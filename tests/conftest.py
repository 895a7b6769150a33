import matplotlib

# headless backend for the plotting helpers
matplotlib.use("Agg")
