"""Line grouping pipeline: group records that share a value in the same column."""
