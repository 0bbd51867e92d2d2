"""Schema and storage access for Miles Tracker."""
