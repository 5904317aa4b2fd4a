"""
VISUALIZATIONS

Two pictures tell most of the PCA story:

    Scree plot - how much variance each component carries, and where
                 the cumulative curve flattens (how many to keep).
    Biplot     - observations in PC space, plus one "spoke" per feature
                 showing how that feature loads on the two components.
                 Spokes pointing the same way = correlated features.

Both functions return the Figure; saving/closing is the caller's job.
"""

import numpy as np
import matplotlib.pyplot as plt


def plot_scree(pca, max_components=None):
    """Bar = proportion of variance per component; line = cumulative."""
    ratios = pca.explained_variance_ratio
    n_show = len(ratios) if max_components is None else min(max_components, len(ratios))
    x = np.arange(1, n_show + 1)
    cumulative = pca.cumulative_variance_ratio[:n_show]

    fig, ax = plt.subplots(figsize=(8, 4.5))
    ax.bar(x, ratios[:n_show], alpha=0.6, color='steelblue', label='Individual')
    ax.set_xlabel('Component')
    ax.set_ylabel('Proportion of Variance')
    ax.set_xticks(x)
    ax.set_xticklabels(pca.component_names[:n_show])
    ax.grid(True, alpha=0.2)

    ax2 = ax.twinx()
    ax2.plot(x, cumulative, 'ro-', linewidth=2, markersize=5, label='Cumulative')
    ax2.set_ylim(0, 1.1)
    ax2.set_ylabel('Cumulative Proportion')

    ax.set_title('Scree Plot: variance captured per component', fontsize=12,
                 fontweight='bold')
    fig.tight_layout()
    return fig


def plot_biplot(pca, scores, x='PC1', y='PC2', label_points=True):
    """
    Scores on two components with feature loading spokes.

    Spokes are stretched so the longest one reaches ~80% of the score
    cloud; only their directions and relative lengths carry meaning.
    """
    loadings = pca.loadings[[x, y]]

    fig, ax = plt.subplots(figsize=(9, 7))
    ax.scatter(scores[x], scores[y], s=20, alpha=0.6, c='steelblue')
    if label_points:
        for name, (sx, sy) in scores[[x, y]].iterrows():
            ax.annotate(str(name), (sx, sy), fontsize=7, alpha=0.7,
                        xytext=(3, 3), textcoords='offset points')

    reach = np.abs(scores[[x, y]].to_numpy()).max()
    longest = np.sqrt((loadings.to_numpy() ** 2).sum(axis=1)).max()
    stretch = 0.8 * reach / longest if longest > 0 else 1.0

    for feature, (lx, ly) in loadings.iterrows():
        ax.annotate('', xy=(lx * stretch, ly * stretch), xytext=(0, 0),
                    arrowprops=dict(arrowstyle='->', color='red', lw=1.5))
        ax.text(lx * stretch * 1.1, ly * stretch * 1.1, feature, color='red',
                fontsize=9, fontweight='bold', ha='center')

    ratio = dict(zip(pca.component_names, pca.explained_variance_ratio))
    ax.set_xlabel(f'{x} ({ratio[x]:.1%})')
    ax.set_ylabel(f'{y} ({ratio[y]:.1%})')
    ax.axhline(0, color='gray', lw=0.5)
    ax.axvline(0, color='gray', lw=0.5)
    ax.grid(True, alpha=0.3)
    ax.set_title('Biplot: scores + feature loadings', fontsize=12, fontweight='bold')
    fig.tight_layout()
    return fig
