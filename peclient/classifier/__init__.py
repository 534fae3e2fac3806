"""Node Classifier API client and data types."""