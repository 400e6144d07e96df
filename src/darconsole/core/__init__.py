"""Dar Console Core -- 领域模型、聚合维护、请求审批工作流与快照存储"""
