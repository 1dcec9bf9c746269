"""
Built-in specs for every Server PM report section.
Spec shape per section key:
{
  "title": "Server Health Check",
  "record_key": "pmServerHealths",      # current backend shape: [{id, details: [...], remarks}]
  "legacy_key": "serverHealthData",     # legacy shape: {<flat row arrays>, remarks, ...}
  "submit_key": "serverHealthData",     # key of this section in the submission payload
  "scalars": {"<field>": <field def>},
  "collections": {
     "<name>": {
        "detail_key": "details",        # row array inside a current-shape record
        "legacy_key": "serverHealthData",  # row array inside the legacy object
        "fields": {"<field>": <field def>},
        "key_fields": [...],            # must be filled on rows that get submitted
        "complete_fields": [...],       # what makes a row count towards completion
        "default_rows": [{...}],        # synthesized when the backend has nothing
     }
  },
  "completion": {"collections": [...], "scalars": [...], "rows": "all|any", "join": "and|or"},
}
Field def: {"wire": "<backend name>", "label": "...", "type": "text|date|status",
            "vocabulary": "<lookup name>" (status only), "out": "<submission name>" (optional)}
"""

YES_NO = "YesNoStatus"
RESULT = "ResultStatus"
DISK_STATUS = "ServerDiskStatus"
ASA_STATUS = "ASAFirewallStatus"


def _text(wire, label, out=None):
    d = {"wire": wire, "label": label, "type": "text"}
    if out:
        d["out"] = out
    return d


def _date(wire, label):
    return {"wire": wire, "label": label, "type": "date"}


def _status(wire, vocabulary, label, out=None):
    d = {"wire": wire, "label": label, "type": "status", "vocabulary": vocabulary}
    if out:
        d["out"] = out
    return d


REMARKS = _text("remarks", "Remarks")


def _check_section(title, record_key, legacy_key, with_date):
    """Scalar-only Willowlynx/network checks: optional date, one yes/no result, remarks."""
    scalars = {}
    if with_date:
        scalars["dateChecked"] = _date("dateChecked", "Date Checked")
    scalars["result"] = _status("yesNoStatusID", YES_NO, "Result", out="YesNoStatusID")
    scalars["remarks"] = REMARKS
    return {
        "title": title,
        "record_key": record_key,
        "legacy_key": legacy_key,
        "submit_key": legacy_key,
        "scalars": scalars,
        "collections": {},
        "completion": {"scalars": list(scalars)},
    }


FAILOVER_SCENARIOS = [
    {
        "fromServer": "SCA-SR1",
        "toServer": "SCA-SR2",
        "expectedResult": "SCA-SR2 will become master. RTUs continue reporting data to SCADA",
        "result": "",
    },
    {
        "fromServer": "SCA-SR2",
        "toServer": "SCA-SR1",
        "expectedResult": "SCA-SR1 will become master. RTUs continue reporting data to SCADA",
        "result": "",
    },
]

ASA_FIREWALL_COMMANDS = [
    {"commandInput": "show cpu usage", "asaFirewallStatus": "", "result": "", "remarks": ""},
    {"commandInput": "show environment", "asaFirewallStatus": "", "result": "", "remarks": ""},
]


# Wizard order; the step list is fixed for a report session.
STEP_ORDER = [
    "signOff",
    "serverHealth",
    "hardDriveHealth",
    "diskUsage",
    "cpuAndRamUsage",
    "networkHealth",
    "willowlynxProcessStatus",
    "willowlynxNetworkStatus",
    "willowlynxRTUStatus",
    "willowlynxHistoricalTrend",
    "willowlynxHistoricalReport",
    "willowlynxSumpPitCCTVCamera",
    "monthlyDatabaseCreation",
    "databaseBackup",
    "timeSync",
    "hotFixes",
    "autoFailOver",
    "asaFirewall",
    "softwarePatch",
]


BUILTIN_SECTIONS = {
    # ---------- Sign off ----------
    "signOff": {
        "title": "Sign Off Information",
        "record_key": "pmReportFormServer",
        "legacy_key": "signOffData",
        "submit_key": "SignOffData",
        "scalars": {
            "attendedBy": _text("attendedBy", "Attended By"),
            "witnessedBy": _text("witnessedBy", "Witnessed By"),
            "startDate": _date("startDate", "Start Date"),
            "completionDate": _date("completionDate", "Completion Date"),
            "remarks": REMARKS,
        },
        "collections": {},
        "completion": {"scalars": ["attendedBy", "witnessedBy", "startDate", "completionDate", "remarks"]},
    },

    # ---------- Server health ----------
    "serverHealth": {
        "title": "Server Health Check",
        "record_key": "pmServerHealths",
        "legacy_key": "serverHealthData",
        "submit_key": "serverHealthData",
        "scalars": {"remarks": REMARKS},
        "collections": {
            "servers": {
                "detail_key": "details",
                "legacy_key": "serverHealthData",
                "fields": {
                    "serverName": _text("serverName", "Server Name"),
                    "result": _status("resultStatusID", RESULT, "Result"),
                    "remarks": REMARKS,
                },
                "key_fields": ["serverName"],
                "complete_fields": ["serverName", "result"],
            },
        },
        "completion": {"collections": ["servers"], "scalars": ["remarks"]},
    },

    # ---------- Hard drive health ----------
    "hardDriveHealth": {
        "title": "Hard Drive Health Check",
        "record_key": "pmServerHardDriveHealths",
        "legacy_key": "hardDriveHealthData",
        "submit_key": "hardDriveHealthData",
        "scalars": {"remarks": REMARKS},
        "collections": {
            "servers": {
                "detail_key": "details",
                "legacy_key": "hardDriveHealthData",
                "fields": {
                    "serverName": _text("serverName", "Server Name"),
                    "result": _status("resultStatusID", RESULT, "Result"),
                    "remarks": REMARKS,
                },
                "key_fields": ["serverName"],
                "complete_fields": ["serverName", "result"],
            },
        },
        "completion": {"collections": ["servers"], "scalars": ["remarks"]},
    },

    # ---------- Disk usage ----------
    "diskUsage": {
        "title": "Disk Usage Check",
        "record_key": "pmServerDiskUsageHealths",
        "legacy_key": "diskUsageData",
        "submit_key": "diskUsageData",
        "scalars": {"remarks": REMARKS},
        "collections": {
            "disks": {
                "detail_key": "details",
                "legacy_key": "disks",
                "fields": {
                    "serverName": _text("serverName", "Server Name"),
                    "diskName": _text("diskName", "Disk"),
                    "capacity": _text("capacity", "Capacity"),
                    "freeSpace": _text("freeSpace", "Free Space"),
                    "usage": _text("usage", "Usage %"),
                    "status": _status("serverDiskStatusID", DISK_STATUS, "Status"),
                    "check": _status("resultStatusID", RESULT, "Check"),
                },
                "key_fields": ["serverName", "diskName"],
                "complete_fields": ["serverName", "diskName", "status", "check"],
            },
        },
        "completion": {"collections": ["disks"], "scalars": ["remarks"]},
    },

    # ---------- CPU and RAM usage ----------
    "cpuAndRamUsage": {
        "title": "CPU and RAM Usage Check",
        "record_key": "pmServerCPUAndMemoryUsages",
        "legacy_key": "cpuAndRamUsageData",
        "submit_key": "cpuAndRamUsageData",
        "scalars": {"remarks": REMARKS},
        "collections": {
            "memory": {
                "detail_key": "memoryUsageDetails",
                "legacy_key": "memoryUsageData",
                "fields": {
                    "machineName": _text("serverName", "Machine Name"),
                    "memorySize": _text("memorySize", "Memory Size"),
                    "memoryInUse": _text("memoryUsagePercentage", "Memory In Use %"),
                    "memoryUsageCheck": _status("resultStatusID", RESULT, "Check"),
                },
                "key_fields": ["machineName"],
                "complete_fields": ["machineName", "memorySize", "memoryInUse", "memoryUsageCheck"],
            },
            "cpu": {
                "detail_key": "cpuUsageDetails",
                "legacy_key": "cpuUsageData",
                "fields": {
                    "machineName": _text("serverName", "Machine Name"),
                    "cpuUsage": _text("cpuUsagePercentage", "CPU Usage %"),
                    "cpuUsageCheck": _status("resultStatusID", RESULT, "Check"),
                },
                "key_fields": ["machineName"],
                "complete_fields": ["machineName", "cpuUsage", "cpuUsageCheck"],
            },
        },
        "completion": {"collections": ["memory", "cpu"], "scalars": ["remarks"]},
    },

    # ---------- Network health + Willowlynx checks (scalar only) ----------
    "networkHealth": _check_section(
        "Network Health Check", "pmServerNetworkHealths", "networkHealthData", with_date=True),
    "willowlynxProcessStatus": _check_section(
        "Willowlynx Process Status Check", "pmServerWillowlynxProcessStatuses",
        "willowlynxProcessStatusData", with_date=False),
    "willowlynxNetworkStatus": _check_section(
        "Willowlynx Network Status Check", "pmServerWillowlynxNetworkStatuses",
        "willowlynxNetworkStatusData", with_date=True),
    "willowlynxRTUStatus": _check_section(
        "Willowlynx RTU Status Check", "pmServerWillowlynxRTUStatuses",
        "willowlynxRTUStatusData", with_date=True),
    "willowlynxHistoricalTrend": _check_section(
        "Willowlynx Historical Trend Check", "pmServerWillowlynxHistoricalTrends",
        "willowlynxHistoricalTrendData", with_date=True),
    "willowlynxHistoricalReport": _check_section(
        "Willowlynx Historical Report Check", "pmServerWillowlynxHistoricalReports",
        "willowlynxHistoricalReportData", with_date=True),
    "willowlynxSumpPitCCTVCamera": _check_section(
        "Willowlynx Sump Pit CCTV Camera Check", "pmServerWillowlynxCCTVCameras",
        "willowlynxSumpPitCCTVCameraData", with_date=False),

    # ---------- Monthly database creation ----------
    "monthlyDatabaseCreation": {
        "title": "Monthly Database Creation Check",
        "record_key": "pmServerMonthlyDatabaseCreations",
        "legacy_key": "monthlyDatabaseCreationData",
        "submit_key": "monthlyDatabaseCreationData",
        "scalars": {"remarks": REMARKS},
        "collections": {
            "databases": {
                "detail_key": "details",
                "legacy_key": "monthlyDatabaseData",
                "fields": {
                    "item": _text("serverName", "Item"),
                    "monthlyDBCreated": _status("yesNoStatusID", YES_NO, "Monthly DB Created", out="YesNoStatusID"),
                },
                "key_fields": ["item"],
                "complete_fields": ["item", "monthlyDBCreated"],
            },
        },
        # a single filled cell or a remark is enough here
        "completion": {"collections": ["databases"], "scalars": ["remarks"], "rows": "any", "join": "or"},
    },

    # ---------- Database backup ----------
    "databaseBackup": {
        "title": "Database Backup Check",
        "record_key": "pmServerDatabaseBackups",
        "legacy_key": "databaseBackupData",
        "submit_key": "databaseBackupData",
        "scalars": {
            "latestBackupFileName": _text("latestBackupFileName", "Latest Backup File Name"),
            "remarks": REMARKS,
        },
        "collections": {
            "mssql": {
                "detail_key": "mssqlDetails",
                "legacy_key": "mssqlBackupData",
                "fields": {
                    "item": _text("serverName", "Item"),
                    "monthlyDBBackupCreated": _status("yesNoStatusID", YES_NO, "Backup Created", out="YesNoStatusID"),
                },
                "key_fields": ["item"],
                "complete_fields": ["item", "monthlyDBBackupCreated"],
            },
            "scada": {
                "detail_key": "scadaDetails",
                "legacy_key": "scadaBackupData",
                "fields": {
                    "item": _text("serverName", "Item"),
                    "monthlyDBBackupCreated": _status("yesNoStatusID", YES_NO, "Backup Created", out="YesNoStatusID"),
                },
                "key_fields": ["item"],
                "complete_fields": ["item", "monthlyDBBackupCreated"],
            },
        },
        "completion": {"collections": ["mssql", "scada"], "scalars": ["remarks", "latestBackupFileName"]},
    },

    # ---------- Time sync ----------
    "timeSync": {
        "title": "SCADA & Historical Time Sync Check",
        "record_key": "pmServerTimeSyncs",
        "legacy_key": "timeSyncData",
        "submit_key": "timeSyncData",
        "scalars": {"remarks": REMARKS},
        "collections": {
            "machines": {
                "detail_key": "details",
                "legacy_key": "timeSyncData",
                "fields": {
                    "machineName": _text("serverName", "Machine Name"),
                    "timeSyncResult": _status("resultStatusID", RESULT, "Time Sync Result"),
                },
                "key_fields": ["machineName"],
                "complete_fields": ["machineName", "timeSyncResult"],
            },
        },
        "completion": {"collections": ["machines"], "scalars": ["remarks"]},
    },

    # ---------- Hotfixes ----------
    "hotFixes": {
        "title": "Hotfixes / Service Packs",
        "record_key": "pmServerHotFixes",
        "legacy_key": "hotFixesData",
        "submit_key": "hotFixesData",
        "scalars": {"remarks": REMARKS},
        "collections": {
            "hotfixes": {
                "detail_key": "details",
                "legacy_key": "hotFixesData",
                "fields": {
                    "machineName": _text("serverName", "Machine Name"),
                    "hotFixName": _text("latestHotFixsApplied", "Latest Hotfix Applied"),
                    "done": _status("resultStatusID", RESULT, "Done"),
                    "remarks": REMARKS,
                },
                "key_fields": ["machineName"],
                "complete_fields": ["machineName", "hotFixName", "done"],
            },
        },
        "completion": {"collections": ["hotfixes"], "scalars": ["remarks"]},
    },

    # ---------- Auto failover ----------
    "autoFailOver": {
        "title": "Auto failover of SCADA server",
        "record_key": "pmServerFailOvers",
        "legacy_key": "autoFailOverData",
        "submit_key": "autoFailOverData",
        "scalars": {"remarks": REMARKS},
        "collections": {
            "scenarios": {
                "detail_key": "details",
                "legacy_key": "autoFailOverData",
                "fields": {
                    "fromServer": _text("fromServer", "From Server"),
                    "toServer": _text("toServer", "To Server"),
                    "expectedResult": _text("expectedResult", "Expected Result"),
                    "result": _status("yesNoStatusID", YES_NO, "Result", out="YesNoStatusID"),
                },
                "key_fields": [],
                "complete_fields": ["result"],
                "default_rows": FAILOVER_SCENARIOS,
            },
        },
        "completion": {"collections": ["scenarios"], "scalars": ["remarks"]},
    },

    # ---------- ASA firewall ----------
    "asaFirewall": {
        "title": "ASA Firewall Maintenance",
        "record_key": "pmServerASAFirewalls",
        "legacy_key": "asaFirewallData",
        "submit_key": "asaFirewallData",
        "scalars": {"remarks": REMARKS},
        "collections": {
            "commands": {
                "detail_key": "details",
                "legacy_key": "asaFirewallData",
                "fields": {
                    "commandInput": _text("commandInput", "Command Input"),
                    "asaFirewallStatus": _status("asaFirewallStatusID", ASA_STATUS, "Expected Result",
                                                 out="ASAFirewallStatusID"),
                    "result": _status("resultStatusID", RESULT, "Done"),
                    "remarks": REMARKS,
                },
                "key_fields": ["commandInput"],
                "complete_fields": ["asaFirewallStatus", "result"],
                "default_rows": ASA_FIREWALL_COMMANDS,
            },
        },
        "completion": {"collections": ["commands"], "scalars": ["remarks"]},
    },

    # ---------- Software patch summary ----------
    "softwarePatch": {
        "title": "Software Patch Summary",
        "record_key": "pmServerSoftwarePatchSummaries",
        "legacy_key": "softwarePatchData",
        "submit_key": "softwarePatchData",
        "scalars": {"remarks": REMARKS},
        "collections": {
            "patches": {
                "detail_key": "details",
                "legacy_key": "softwarePatchData",
                "fields": {
                    "machineName": _text("serverName", "Machine Name"),
                    "previousPatch": _text("previousPatch", "Previous Patch"),
                    "currentPatch": _text("currentPatch", "Current Patch"),
                    "remarks": REMARKS,
                },
                "key_fields": ["machineName"],
                "complete_fields": ["machineName", "previousPatch", "currentPatch"],
            },
        },
        "completion": {"collections": ["patches"], "scalars": ["remarks"]},
    },
}
