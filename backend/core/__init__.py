"""Core tracking logic: time parsing, storage, session state, aggregation and ticks"""
