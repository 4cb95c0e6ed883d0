import matplotlib

# tests render without a display
matplotlib.use('Agg')
