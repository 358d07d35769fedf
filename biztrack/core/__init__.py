"""BizTrack core: configuration, database, security, logging and errors"""
