"""
ML layer — return estimation for bank records.

Modules
-------
features     : FEATURE_COLS + record → feature-row / label encoding.
return_model : ReturnModel protocol; scikit-learn MLP and LightGBM backends.
model_store  : ModelStore port; joblib artifact store and a no-op store.
estimator    : ReturnEstimator — train once, predict with heuristic fallback.
"""
