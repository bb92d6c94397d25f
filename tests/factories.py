from schemas import (
    ColorGroupData, IndustryData, ProductionRecord, RFTBatchEntry, RFTReportRecord, ShadeStatus,
)


def industry(name, total, groups=None, inhouse=None, sub_contract=0, loading_cap=None):
    return IndustryData(
        name=name,
        total=total,
        loading_cap=loading_cap,
        color_groups=[ColorGroupData(group_name=g, weight=w) for g, w in (groups or {}).items()],
        inhouse=total - sub_contract if inhouse is None else inhouse,
        sub_contract=sub_contract,
    )


def production_record(date, lantabur=1000, taqwa=500, lantabur_groups=None, taqwa_groups=None,
                      record_id=None, **kwargs):
    record = ProductionRecord(
        date=date,
        lantabur=industry("Lantabur", lantabur, lantabur_groups, **kwargs),
        taqwa=industry("Taqwa", taqwa, taqwa_groups),
        total_production=lantabur + taqwa,
    )
    if record_id:
        record = record.model_copy(update={"id": record_id})
    return record


def rft_entry(dyeing_type="B/D CARD", ok=True, qty=100, shift="YOUSUF", group="Black", load=80):
    return RFTBatchEntry(
        mc="M1",
        batch_no="B-1",
        dyeing_type=dyeing_type,
        shade=ShadeStatus.OK if ok else ShadeStatus.NOT_OK,
        f_qty=qty,
        shift_unload=shift,
        color_group=group,
        load_cap_percent=load,
    )


def rft_record(date, entries=None, bulk=0, lab=0, record_id=None):
    record = RFTReportRecord(
        date=date,
        entries=entries or [],
        bulk_rft_percent=bulk,
        lab_rft_percent=lab,
    )
    if record_id:
        record = record.model_copy(update={"id": record_id})
    return record
