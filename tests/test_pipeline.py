import warnings

import numpy as np
import pandas as pd
import pytest

from pca_regression import (
    FeatureMismatchError,
    InvalidFeatureMatrixError,
    LinearModel,
    OutOfDistributionWarning,
    PCATransform,
    PCRegression,
    predict_observation,
)
from pca_regression.pipeline import select_components

EPS = 1e-9


@pytest.fixture
def pcr(features, mpg):
    return PCRegression.fit(features, mpg, components=2)


def test_fit_with_target_column_name(cars):
    from pca_regression.datasets import mtcars_features

    pcr = PCRegression.fit(mtcars_features(cars, target=None), 'mpg', components=3)
    assert 'mpg' not in pcr.feature_names
    assert pcr.components == ['PC1', 'PC2', 'PC3']
    assert pcr.model.target_name == 'mpg'


def test_training_row_prediction_matches_fitted_value(pcr, features):
    for car in ['Mazda RX4', 'Lincoln Continental', 'Toyota Corolla']:
        predicted = pcr.predict_observation(features.loc[car])
        assert predicted == pytest.approx(pcr.model.fitted_values[car], abs=EPS)


def test_lincoln_continental_prediction(features, mpg):
    """All components: same fit as OLS on the raw features, close to the observed 10.4"""
    pcr = PCRegression.fit(features, mpg)
    car = features.loc['Lincoln Continental'].to_dict()

    predicted = pcr.predict_observation(car)

    assert predicted == pytest.approx(pcr.model.fitted_values['Lincoln Continental'], abs=EPS)
    assert abs(predicted - 10.4) < 2.5


def test_all_components_equals_raw_feature_regression(features, mpg):
    pcr = PCRegression.fit(features, mpg)
    raw = LinearModel.fit(features, mpg)

    np.testing.assert_allclose(pcr.model.fitted_values.to_numpy(),
                               raw.fitted_values.to_numpy(), atol=1e-8)
    assert pcr.model.residual_standard_error == pytest.approx(raw.residual_standard_error)


def test_observation_order_does_not_matter(pcr, features):
    row = features.loc['Valiant']
    reordered = {name: row[name] for name in reversed(features.columns)}
    assert pcr.predict_observation(reordered) == pytest.approx(pcr.predict_observation(row))


def test_missing_feature_raises(pcr, features):
    row = features.loc['Valiant'].drop('wt')
    with pytest.raises(FeatureMismatchError) as exc:
        pcr.predict_observation(row)
    assert exc.value.missing == ['wt']
    assert exc.value.unexpected == []


def test_extra_feature_raises(pcr, features):
    row = features.loc['Valiant'].to_dict()
    row['mpg'] = 18.1
    with pytest.raises(FeatureMismatchError) as exc:
        pcr.predict_observation(row)
    assert exc.value.unexpected == ['mpg']


def test_out_of_range_warns_but_predicts(pcr, features):
    row = features.loc['Valiant'].to_dict()
    row['hp'] = 1000.0

    with pytest.warns(OutOfDistributionWarning) as record:
        predicted = pcr.predict_observation(row)

    assert np.isfinite(predicted)
    assert record[0].message.features == ['hp']


def test_in_range_does_not_warn(pcr, features):
    with warnings.catch_warnings():
        warnings.simplefilter('error', OutOfDistributionWarning)
        pcr.predict_observation(features.loc['Merc 230'])


def test_non_numeric_observation_rejected(pcr, features):
    row = features.loc['Valiant'].to_dict()
    row['cyl'] = 'six'
    with pytest.raises(InvalidFeatureMatrixError):
        pcr.predict_observation(row)


def test_predict_table(pcr, features):
    predicted = pcr.predict(features)
    np.testing.assert_allclose(predicted.to_numpy(), pcr.model.fitted_values.to_numpy(), atol=EPS)
    assert list(predicted.index) == list(features.index)


def test_predict_table_warns_once_for_out_of_range(pcr, features):
    new = features.iloc[:3].copy()
    new.iloc[0, new.columns.get_loc('wt')] = 0.5
    new.iloc[1, new.columns.get_loc('carb')] = 12
    with pytest.warns(OutOfDistributionWarning) as record:
        pcr.predict(new)
    assert len(record) == 1
    assert record[0].message.features == ['wt', 'carb']


def test_module_level_predict_observation(features, mpg):
    pca, scores = PCATransform.fit_transform(features)
    model = LinearModel.fit(scores[['PC1', 'PC3']], mpg)

    predicted = predict_observation(pca, model, features.loc['Fiat 128'])

    assert predicted == pytest.approx(model.fitted_values['Fiat 128'], abs=EPS)


def test_explicit_component_subset(features, mpg):
    pcr = PCRegression.fit(features, mpg, components=['PC2', 'PC1'])
    assert pcr.components == ['PC2', 'PC1']
    car = features.loc['Honda Civic']
    assert pcr.predict_observation(car) == pytest.approx(pcr.model.fitted_values['Honda Civic'], abs=EPS)


def test_select_components(features):
    pca = PCATransform.fit(features)
    assert select_components(pca, None) == pca.component_names
    assert select_components(pca, 2) == ['PC1', 'PC2']
    with pytest.raises(ValueError):
        select_components(pca, 0)
    with pytest.raises(ValueError):
        select_components(pca, 9)
    with pytest.raises(ValueError):
        select_components(pca, ['PC1', 'PC42'])
    with pytest.raises(ValueError):
        select_components(pca, ['PC1', 'PC1'])


def test_unknown_target_column(features):
    with pytest.raises(InvalidFeatureMatrixError):
        PCRegression.fit(features, 'mpg')


def test_components_are_uncorrelated(pcr):
    corr = pcr.scores.corr().to_numpy()
    np.testing.assert_allclose(corr, np.eye(corr.shape[0]), atol=1e-8)


def test_fit_does_not_modify_input(features, mpg):
    before = features.copy()
    PCRegression.fit(features, mpg, components=2)
    pd.testing.assert_frame_equal(features, before)
