import pytest

import statshouse.data


MINIMAL_SAMPLE_Y = """\
#YYYY,device,coverage,gen
2009,meter,1,2956.1
"""

SAMPLE_GEN_M = """\
#YYYY-MM,device,coverage,gen,device,coverage,gen,device,coverage,gen
2008-02,,,,meter,1,4,SunnyBeam,0.142857,3.54
2008-03,,,,meter,1,70,SunnyBeam,1,68.55
2008-04,,,,meter,1,108,SunnyBeam,1,106.13
2008-05,,,,meter,1,135,SunnyBeam,1,134.03
2008-06,,,,meter,1,160,SunnyBeam,1,158.1
2008-07,,,,meter,1,161,SunnyBeam,1,146.12
"""

SAMPLE_GEN_Y = """\
#YYYY,device,coverage,gen,device,coverage,gen,device,coverage,gen
2008,,,,meter,0.916667,915,SunnyBeam,0.845238,889.93
2009,,,,meter,1,2956.1,SunnyBeam,1,2907.15
2010,,,,meter,1,3546.9,SunnyBeam,1,3482.76
2011,,,,meter,1,3988.1,SunnyBeam,1,3922.27
2012,,,,meter,1,3777.8,SunnyBeam,1,3712.68
2013,,,,meter,1,3749.7,SunnyBeam,1,3687.79
2014,,,,meter,1,3944,SunnyBeam,1,3881.99
2015,,,,meter,1,3828.6,SunnyBeam,1,3766.9
2016,,,,meter,1,3703.2,SunnyBeam,1,3676.54
2017,,,,meter,1,3794.4,SunnyBeam,1,3736.89
2018,Enphase,0.410714,1069.29,meter,1,3927.8,SunnyBeam,1,3931.44
2019,Enphase,0.999888,3870.89,meter,1,3855.5,SunnyBeam,1,3800.95
2020,Enphase,0.999888,4084.42,meter,1,4069.9,SunnyBeam,1,4020.86
2021,Enphase,0.999888,3514.19,meter,1,3500.8,SunnyBeam,1,3448.6
2022,Enphase,0.999888,3943.38,meter,1,3925.1,SunnyBeam,1,3865.5
2023,Enphase,0.416555,1415.92,meter,0.416667,1411,SunnyBeam,0.440476,1554.63
"""


def _daily_text (months: int) -> str:

	"""Synthetic daily data: one stream, every day of ``months`` months of 2020."""

	days_in_month = (31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
	lines = []

	for month in range(months):
		for day in range(1, days_in_month[month] + 1):
			lines.append(f"2020-{month + 1:02d}-{day:02d},meter,1,{(day * 7 + month * 3) % 40 + 1}")

	return "\n".join(lines) + "\n"


@pytest.fixture
def minimal_sample_y () -> statshouse.data.Dataset:

	"""One yearly row, one stream."""

	return statshouse.data.read_csv(MINIMAL_SAMPLE_Y)


@pytest.fixture
def sample_gen_m () -> statshouse.data.Dataset:

	"""Six monthly rows, three streams (the first empty)."""

	return statshouse.data.read_csv(SAMPLE_GEN_M)


@pytest.fixture
def sample_gen_y () -> statshouse.data.Dataset:

	"""Sixteen yearly rows, three streams."""

	return statshouse.data.read_csv(SAMPLE_GEN_Y)


@pytest.fixture
def sample_daily () -> statshouse.data.Dataset:

	"""Four months of daily rows, one stream."""

	return statshouse.data.read_csv(_daily_text(4))
