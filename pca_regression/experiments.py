"""
MTCARS WALKTHROUGH - PCA → regression → prediction

Runs the whole workflow on mtcars and prints what each step produces:

    1. Importance of components (std, proportion, cumulative)
    2. Loadings of the first components
    3. OLS of mpg on the leading components
    4. Predicting a car through the stored transform
    5. ABLATION: how RSE changes with the number of components

USAGE:
    python -m pca_regression.experiments
    python -m pca_regression.experiments --components 3 --output-dir figures/
"""

import argparse
import logging
import os

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for saving figures
import matplotlib.pyplot as plt

from .datasets import TARGET_COLUMN, load_mtcars, mtcars_features
from .pipeline import PCRegression
from .visualization import plot_biplot, plot_scree

EXAMPLE_CAR = 'Lincoln Continental'


def component_ablation(features, target):
    """
    ABLATION: regress on PC1..PCk for every k.

    Returns a list of (k, RSE, adjusted R²).
    """
    rows = []
    for k in range(1, features.shape[1] + 1):
        pcr = PCRegression.fit(features, target, components=k)
        rows.append((k, pcr.model.residual_standard_error, pcr.model.adj_r_squared))
    return rows


def run(components=2, output_dir=None):
    """Run the walkthrough; returns the fitted PCRegression."""
    cars = load_mtcars()
    features = mtcars_features(cars)
    target = cars[TARGET_COLUMN]

    pcr = PCRegression.fit(features, target, components=components)

    print("=" * 60)
    print("PCA REGRESSION ON MTCARS")
    print("=" * 60)
    print(f"Features: {', '.join(pcr.feature_names)}")
    print(f"Target:   {TARGET_COLUMN}")

    print("\n1. IMPORTANCE OF COMPONENTS")
    print("-" * 40)
    print(pcr.pca.summary().round(4).to_string())

    print("\n2. LOADINGS")
    print("-" * 40)
    print(pcr.pca.loadings[pcr.pca.component_names[:3]].round(3).to_string())

    print(f"\n3. REGRESSION: {TARGET_COLUMN} ~ {' + '.join(pcr.components)}")
    print("-" * 40)
    model = pcr.model
    print(model.coefficient_table().round(4).to_string())
    print(f"Residual standard error: {model.residual_standard_error:.4f} "
          f"on {model.df_residual} degrees of freedom")
    print(f"R²: {model.r_squared:.4f}   adjusted R²: {model.adj_r_squared:.4f}")
    print(f"F-statistic: {model.f_statistic:.2f}, p-value: {model.f_pvalue:.3g}")

    print(f"\n4. PREDICTING '{EXAMPLE_CAR}'")
    print("-" * 40)
    car = features.loc[EXAMPLE_CAR]
    predicted = pcr.predict_observation(car)
    print(f"   observed mpg:  {target[EXAMPLE_CAR]:.2f}")
    print(f"   predicted mpg: {predicted:.2f}")

    print("\n5. ABLATION: NUMBER OF COMPONENTS")
    print("-" * 40)
    for k, rse, adj in component_ablation(features, target):
        bar = "█" * int(max(adj, 0) * 40)
        print(f"   k={k:<2}  RSE={rse:.3f}  adj R²={adj:.3f} {bar}")
    print("→ Past the first couple of components each one buys little")

    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        figures = [
            ('pca_scree.png', plot_scree(pcr.pca)),
            ('pca_biplot.png', plot_biplot(pcr.pca, pcr.scores)),
        ]
        for filename, fig in figures:
            save_path = os.path.join(output_dir, filename)
            fig.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Saved: {save_path}")
            plt.close(fig)

    return pcr


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument('--components', type=int, default=2,
                        help='number of leading components to regress on')
    parser.add_argument('--output-dir', default=None,
                        help='save scree plot and biplot here')
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')
    run(components=args.components, output_dir=args.output_dir)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
