import logging
from time import perf_counter

from depth2tree import Depth2Regressor
from depth2tree.datasets import PolynomialConfig, make_noisy_polynomial
from depth2tree.export import step_segments, write_predictions_csv, write_sample_csv

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

cfg = PolynomialConfig(n_samples=200, x_min=-3.0, x_max=3.0, noise_std=2.0)
x, y, coeffs = make_noisy_polynomial(cfg, random_state=42)
print(f"degree {len(coeffs) - 1} polynomial, coeffs={coeffs.round(3).tolist()}")
write_sample_csv("noisy_polynomial.csv", x, y)

reg = Depth2Regressor(verbose=1)
t0 = perf_counter(); reg.fit(x, y); print(f"fit: {perf_counter()-t0:.4f} s")
reg.print_tree()
for rule in reg.export_rules():
    print(rule)
print(f"R^2 on training data: {reg.score(x, y):.3f}")

for a, b, value in step_segments(reg, cfg.x_min, cfg.x_max):
    print(f"[{a:+.3f}, {b:+.3f}) -> {value:.3f}")

write_predictions_csv("predictions_depth2.csv", reg, x, y)
try:
    reg.export_graphviz("depth2_tree", format="dot")
except RuntimeError as e:
    print(f"Skipping Graphviz export: {e}")
