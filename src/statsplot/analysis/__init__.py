"""Analysis package: aggregation and hypothesis tests behind the charts"""
