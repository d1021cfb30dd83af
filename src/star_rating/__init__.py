"""
Star-rating prediction from review text.

Compares three text classifiers (multinomial Naive Bayes, gradient-boosted
trees, LASSO multinomial regression) on TF-IDF features of review text.

Key modules:
- prepare_dataset: Loading, postal-code filtering, sampling, stratified split
- core.text_pipeline: tokenize -> stem -> stopwords -> tokenfilter -> tfidf
- core.cross_validation: Stratified k-fold indices and parameter grids
- core.metrics: Accuracy, one-vs-rest ROC AUC, confusion matrix
- core.caching: On-disk memoization of tuning and final results
- models: Estimators per model family and the grid registry
- experiments: Tuning, one-standard-error selection, test evaluation, plots
- cli: Flags shared by the runner scripts
"""

__version__ = "0.1.0"
