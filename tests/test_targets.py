import numpy as np
import pytest

from reserve.targets import feature_totals, resolve_targets

FEATURES = np.array(
    [
        [1.0, 0.0, 3.0],
        [2.0, 2.0, 0.0],
    ]
)


class TestPercentTargets:
    def test_fraction_of_total_abundance(self):
        np.testing.assert_allclose(feature_totals(FEATURES), [4.0, 4.0])
        np.testing.assert_allclose(resolve_targets(FEATURES, 0.25), [1.0, 1.0])

    def test_per_feature_sequence(self):
        np.testing.assert_allclose(
            resolve_targets(FEATURES, [0.5, 1.0]), [2.0, 4.0]
        )

    def test_mapping_by_feature_name(self):
        rhs = resolve_targets(
            FEATURES, {"b": 0.5, "a": 0.0}, feature_names=["a", "b"]
        )
        np.testing.assert_allclose(rhs, [0.0, 2.0])

    @pytest.mark.parametrize("target", [-0.1, 1.5, [0.5, 2.0]])
    def test_out_of_range_rejected(self, target):
        with pytest.raises(ValueError):
            resolve_targets(FEATURES, target)


class TestAbsoluteTargets:
    def test_used_as_given(self):
        np.testing.assert_allclose(
            resolve_targets(FEATURES, [3.0, 4.0], "absolute"), [3.0, 4.0]
        )

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            resolve_targets(FEATURES, -1.0, "absolute")

    def test_more_than_available_rejected(self):
        with pytest.raises(ValueError, match="exceed"):
            resolve_targets(FEATURES, [4.0, 4.5], "absolute")


class TestTargetValidation:
    def test_unknown_target_type(self):
        with pytest.raises(ValueError):
            resolve_targets(FEATURES, 0.5, "relative")

    def test_wrong_number_of_targets(self):
        with pytest.raises(ValueError):
            resolve_targets(FEATURES, [0.1, 0.2, 0.3])

    def test_mapping_needs_names(self):
        with pytest.raises(ValueError):
            resolve_targets(FEATURES, {"a": 0.5, "b": 0.5})

    def test_mapping_missing_feature(self):
        with pytest.raises(ValueError, match="No target"):
            resolve_targets(FEATURES, {"a": 0.5}, feature_names=["a", "b"])

    def test_nan_target_rejected(self):
        with pytest.raises(ValueError):
            resolve_targets(FEATURES, float("nan"))
