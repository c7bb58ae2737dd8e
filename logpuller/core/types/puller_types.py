LogSourceName = str
# The connector type declared under `managed.type` in a log source config.
LogSourceType = str
