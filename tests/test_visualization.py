import matplotlib.pyplot as plt

from pca_regression.pca import PCATransform
from pca_regression.visualization import plot_biplot, plot_scree


def test_scree_plot(features):
    pca = PCATransform.fit(features)
    fig = plot_scree(pca)
    ax = fig.axes[0]
    assert len(ax.patches) == 8
    plt.close(fig)


def test_scree_plot_truncated(features):
    pca = PCATransform.fit(features)
    fig = plot_scree(pca, max_components=3)
    assert len(fig.axes[0].patches) == 3
    plt.close(fig)


def test_biplot_has_one_spoke_per_feature(features):
    pca, scores = PCATransform.fit_transform(features)
    fig = plot_biplot(pca, scores, label_points=False)
    ax = fig.axes[0]
    spoke_labels = [t.get_text() for t in ax.texts if t.get_text()]
    assert spoke_labels == list(features.columns)
    assert ax.get_xlabel().startswith('PC1')
    plt.close(fig)


def test_biplot_other_components(features, tmp_path):
    pca, scores = PCATransform.fit_transform(features)
    fig = plot_biplot(pca, scores, x='PC2', y='PC3')
    path = tmp_path / 'biplot.png'
    fig.savefig(path)
    assert path.exists()
    plt.close(fig)
