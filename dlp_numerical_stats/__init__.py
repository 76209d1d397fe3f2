"""Cloud DLP numerical stats runs over BigQuery columns."""
