# -*- coding: utf-8 -*-
"""
Translation dictionaries for English and Simplified Chinese.

This module contains all translatable strings for the Time Ledger application.
"""

TRANSLATIONS = {
    "en": {
        # Application
        "app.name": "Time Ledger",

        # Categories
        "category.investment": "Investment",
        "category.maintenance": "Maintenance",
        "category.drain": "Drain",
        "category.unreconciled": "Unreconciled",
        "category.empty": "Empty",

        # Periods
        "period.week": "{year} Week {week}",
        "period.month": "{year}-{month:02d}",
        "period.year": "{year}",
        "period.custom": "{start} to {end}",

        # Report
        "report.title": "Time ledger: {label}",
        "report.logged": "Logged",
        "report.possible": "Elapsed",
        "report.unreconciled": "Unreconciled",
        "report.coverage": "Coverage",
        "report.categories": "By category",
        "report.gaps": "Gaps to fill",
        "report.no_gaps": "Fully reconciled",
        "report.entries": "Entries",
        "report.generated": "Generated {when}",

        # Timer
        "timer.idle": "No task running",
        "timer.running": "{title}: {elapsed}",

        # Messages
        "msg.added": "Added {count} entries",
        "msg.updated": "Updated {id}",
        "msg.deleted": "Deleted {id}",
        "msg.not_deleted": "Nothing to delete for {id}",
        "msg.started": "Started '{title}'",
        "msg.stopped": "Stopped, logged {minutes} min",
        "msg.error": "Error: {error}",
        "msg.exported": "Exported {count} entries to {path}",
        "msg.backup": "Backup written to {path}",
        "msg.restored": "Restored {count} entries",
        "msg.no_insight": "No insight available",
    },
    "zh": {
        # Application
        "app.name": "时光账本",

        # Categories
        "category.investment": "投资",
        "category.maintenance": "维持",
        "category.drain": "损耗",
        "category.unreconciled": "未入账",
        "category.empty": "空",

        # Periods
        "period.week": "{year}年 第{week}周",
        "period.month": "{year}年{month:02d}月",
        "period.year": "{year}年",
        "period.custom": "{start} 至 {end}",

        # Report
        "report.title": "时光账本：{label}",
        "report.logged": "记录时长",
        "report.possible": "已过时长",
        "report.unreconciled": "未对账",
        "report.coverage": "对账率",
        "report.categories": "分类统计",
        "report.gaps": "需补全的时段",
        "report.no_gaps": "此阶段已完美对账",
        "report.entries": "记录明细",
        "report.generated": "生成于 {when}",

        # Timer
        "timer.idle": "没有进行中的任务",
        "timer.running": "{title}：{elapsed}",

        # Messages
        "msg.added": "已添加 {count} 条记录",
        "msg.updated": "已更新 {id}",
        "msg.deleted": "已删除 {id}",
        "msg.not_deleted": "{id} 不存在，无需删除",
        "msg.started": "已开始「{title}」",
        "msg.stopped": "已结束，记录 {minutes} 分钟",
        "msg.error": "错误：{error}",
        "msg.exported": "已导出 {count} 条记录到 {path}",
        "msg.backup": "备份已写入 {path}",
        "msg.restored": "已恢复 {count} 条记录",
        "msg.no_insight": "暂无洞察",
    },
}
