"""Project grouping, date batching and invoice planning."""
